import io
import logging
from typing import BinaryIO, Callable, Optional, TypeVar

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from shared_storage.errors import (
    ObjectNotFound,
    ServiceUnavailable,
    TransientStoreFailure,
    is_not_found,
    is_transient,
)
from shared_storage.retry import RetryPolicy, retry_on

T = TypeVar("T")
logger = logging.getLogger(__name__)

BUCKET_RETRY = RetryPolicy(attempts=3, delay=0.5, multiplier=2)
OBJECT_RETRY = RetryPolicy(attempts=3, delay=1.0, multiplier=2)


class S3Client:
    """boto3 client bound to one bucket; every call is retried on transient failures."""

    def __init__(self, bucket: str, endpoint: Optional[str], access_key: str, secret_key: str,
                 region: Optional[str] = None,
                 bucket_retry: RetryPolicy = BUCKET_RETRY,
                 object_retry: RetryPolicy = OBJECT_RETRY,
                 empty_on_unavailable: bool = False,
                 sleep: Optional[Callable[[float], None]] = None):
        self.bucket = bucket
        self.bucket_retry = bucket_retry
        self.object_retry = object_retry
        self.empty_on_unavailable = empty_on_unavailable
        self._sleep = sleep
        self.client = boto3.client('s3', endpoint_url=endpoint,
                                   region_name=region,
                                   aws_access_key_id=access_key,
                                   aws_secret_access_key=secret_key,
                                   config=Config(signature_version='s3v4',
                                                 # retry_on is the only retry layer
                                                 retries={'mode': 'standard', 'total_max_attempts': 1}))

    def _attempt(self, operation: str, fn: Callable[[], T]) -> Callable[[], T]:
        def _call() -> T:
            try:
                return fn()
            except ClientError as e:
                if is_not_found(e):
                    raise
                if is_transient(e):
                    raise TransientStoreFailure(f"{operation}: {e}") from e
                logger.error(f"S3 {operation} failed: {e}")
                raise
            except Exception as e:
                if is_transient(e):
                    raise TransientStoreFailure(f"{operation}: {e}") from e
                raise
        return _call

    def _unavailable(self, operation: str) -> Callable[[Exception], T]:
        def _recover(exc: Exception) -> T:
            logger.error(f"All retry attempts failed for {operation}. Object store seems persistently unavailable: {exc}")
            raise ServiceUnavailable(operation, exc) from exc
        return _recover

    def _log_retry(self, attempt: int, exc: Exception, sleep_s: float):
        logger.warning(f"S3 retry #{attempt} in {sleep_s:.2f}s ({exc})")

    def _guarded(self, operation: str, fn: Callable[[], T], policy: RetryPolicy,
                 recover: Optional[Callable[[Exception], T]] = None) -> T:
        kwargs = {"sleep": self._sleep} if self._sleep else {}
        return retry_on(
            self._attempt(operation, fn),
            policy=policy,
            is_retryable=lambda e: isinstance(e, TransientStoreFailure),
            recover=recover or self._unavailable(operation),
            on_retry=self._log_retry,
            **kwargs,
        )

    def bucket_exists(self) -> bool:
        try:
            self.client.head_bucket(Bucket=self.bucket)
            return True
        except ClientError as e:
            if is_not_found(e) or e.response.get("Error", {}).get("Code") == "NoSuchBucket":
                return False
            raise

    def make_bucket(self) -> None:
        self.client.create_bucket(Bucket=self.bucket)

    def ensure_bucket(self) -> None:
        def _ensure():
            if not self.bucket_exists():
                logger.info(f"Bucket '{self.bucket}' does not exist. Creating it now.")
                self.make_bucket()
                logger.info(f"Bucket '{self.bucket}' created successfully.")
            else:
                logger.debug(f"Bucket '{self.bucket}' already exists.")
        self._guarded(f"ensure bucket '{self.bucket}'", _ensure, self.bucket_retry)

    def put_object(self, object_key: str, stream: BinaryIO, length: int, content_type: str) -> None:
        start = stream.tell()

        def _put():
            # a retried attempt must resend the whole body
            stream.seek(start)
            self.client.put_object(
                Bucket=self.bucket,
                Key=object_key,
                Body=stream,
                ContentLength=length,
                ContentType=content_type,
            )
        self._guarded(f"upload of {object_key}", _put, self.object_retry)
        logger.debug(f"Uploaded s3://{self.bucket}/{object_key} ({length} bytes, {content_type})")

    def get_object(self, object_key: str) -> BinaryIO:
        def _get():
            try:
                return self.client.get_object(Bucket=self.bucket, Key=object_key)['Body']
            except ClientError as e:
                if is_not_found(e):
                    logger.warning(f"Object not found: s3://{self.bucket}/{object_key}")
                    raise ObjectNotFound(object_key) from e
                raise

        recover = None
        if self.empty_on_unavailable:
            def recover(exc: Exception) -> BinaryIO:
                logger.error(f"Object store unavailable for {object_key}, serving empty stream: {exc}")
                return io.BytesIO(b"")
        return self._guarded(f"retrieval of {object_key}", _get, self.object_retry, recover)

    def presigned_url(self, object_key: str, method: str = "GET", expiry_minutes: int = 60,
                      content_type: Optional[str] = None) -> str:
        client_method = 'put_object' if method.upper() == "PUT" else 'get_object'
        params = {'Bucket': self.bucket, 'Key': object_key}
        if content_type and client_method == 'put_object':
            params['ContentType'] = content_type
        return self._guarded(
            f"pre-signed URL for {object_key}",
            lambda: self.client.generate_presigned_url(
                ClientMethod=client_method,
                Params=params,
                ExpiresIn=expiry_minutes * 60,
            ),
            self.object_retry,
        )
