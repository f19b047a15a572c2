import logging
import subprocess
from pathlib import Path

import ffmpeg

from media_api.cores.exceptions import IOFailure, TranscodeFailure

logger = logging.getLogger(__name__)

PLAYLIST_NAME = "playlist.m3u8"


def build_hls_command(input_path: str, output_dir: str, segment_time: int = 10,
                      ffmpeg_binary: str = "ffmpeg") -> list[str]:
    playlist = str(Path(output_dir) / PLAYLIST_NAME)
    return (
        ffmpeg
        .input(input_path)
        .output(
            playlist,
            format='hls',
            codec='copy',
            start_number=0,
            hls_time=segment_time,
            hls_list_size=0,
        )
        .compile(cmd=ffmpeg_binary)
    )


def generate_hls(input_path: str, output_dir: str, segment_time: int = 10,
                 ffmpeg_binary: str = "ffmpeg") -> str:
    """Run ffmpeg to cut ``input_path`` into HLS segments plus a playlist.

    Blocks until ffmpeg exits. Its combined stdout/stderr is drained into the
    debug log. Returns the playlist filename.
    """
    args = build_hls_command(input_path, output_dir, segment_time, ffmpeg_binary)
    logger.info(f"Start transcoding: {input_path}")
    try:
        process = subprocess.Popen(
            args,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
        )
    except FileNotFoundError as e:
        raise IOFailure(f"FFmpeg not found ({ffmpeg_binary}), ensure FFmpeg is installed") from e

    with process.stdout:
        for line in process.stdout:
            logger.debug(line.rstrip())
    exit_code = process.wait()

    if exit_code != 0:
        logger.error(f"FFmpeg Transcode Error: exit code {exit_code} for {input_path}")
        raise TranscodeFailure(exit_code)
    logger.info("HLS generated successfully.")
    return PLAYLIST_NAME
