"""
Configuration Package for Media Staging.

Static settings live here so that behaviour can be tuned without touching the
staging logic:

- Common settings: logging format, document/temporary directory layout, the
  user configuration file and worker counts.
- Image settings: recognised image extensions and JPEG encoding parameters.
- Video settings: recognised video extensions and the FFmpeg export presets.
"""
