"""
Utilities Package for Media Staging.

Helper modules that are not specific to any single part of the staging domain.

Modules:
    - ffmpeg_utils.py: Runs external commands (FFmpeg) safely and resolves the
      executables to use.
    - format_utils.py: Formats values such as file sizes for log messages.
"""
