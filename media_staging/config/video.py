"""
Configuration settings related to video staging.

This module defines the extensions treated as videos, the FFmpeg arguments of
each export preset and the limits applied while exporting.
"""

# --- General Video Settings ---
VIDEO_EXTENSIONS = (
    ".mov", ".mp4", ".m4v", ".3gp", ".avi", ".mkv", ".mts", ".m2ts", ".ts",
    ".webm", ".wmv", ".mpg",
)
AUDIO_EXTENSIONS = (".m4a", ".mp3", ".aac", ".wav", ".flac", ".opus", ".caf")

# --- Export Settings ---
# Seconds after which an export is abandoned. None lets FFmpeg run unbounded.
EXPORT_TIMEOUT_SECONDS = None

# Output container formats an export session can produce.
SUPPORTED_OUTPUT_FILE_TYPES = ("mp4",)

PRESET_HIGHEST_QUALITY = "highest_quality"
PRESET_MEDIUM_QUALITY = "medium_quality"
PRESET_LOW_QUALITY = "low_quality"

# FFmpeg arguments placed between the input and the output path for each
# preset. Every preset produces H.264/AAC in an MP4 container that plays on
# any standard decoder.
_COMMON_MP4_OPTIONS = ["-pix_fmt", "yuv420p", "-movflags", "+faststart"]

# yuv420p needs even dimensions, so odd widths and heights are rounded down.
_EVEN_DIMENSIONS_FILTER = "scale=trunc(iw/2)*2:trunc(ih/2)*2"

EXPORT_PRESETS = {
    PRESET_HIGHEST_QUALITY: [
        "-vf", _EVEN_DIMENSIONS_FILTER,
        "-c:v", "libx264", "-preset", "slow", "-crf", "18",
        "-c:a", "aac", "-b:a", "256k",
        *_COMMON_MP4_OPTIONS,
    ],
    PRESET_MEDIUM_QUALITY: [
        "-vf", _EVEN_DIMENSIONS_FILTER,
        "-c:v", "libx264", "-preset", "medium", "-crf", "23",
        "-c:a", "aac", "-b:a", "160k",
        *_COMMON_MP4_OPTIONS,
    ],
    PRESET_LOW_QUALITY: [
        "-vf", "scale=-2:'trunc(min(720,ih)/2)*2'",
        "-c:v", "libx264", "-preset", "fast", "-crf", "28",
        "-c:a", "aac", "-b:a", "96k",
        *_COMMON_MP4_OPTIONS,
    ],
}

# Name of the text file (inside the error log directory) that records every
# FFmpeg command executed by an export.
COMMAND_TEXT = "cmd.txt"
