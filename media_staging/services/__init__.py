"""
Services Package for Media Staging.

A service performs one high-level task and sits between the entry points (CLI,
library callers) and the domain models.

- **Staging Service (`MediaStager`):**
  Accepts staging requests, runs them on a thread pool and reports each result
  through a future and an optional completion callback.

- **Image Converter (`ImageConverter`):**
  Decodes library photos with Pillow and re-encodes them as JPEG.

- **Video Exporter (`VideoAsset`, `ExportSession`):**
  Probes library videos and exports them to MP4 with FFmpeg.

- **Logging Service (`ErrorLog`, `StagingLog`):**
  Writes failure reports (plain text) and staged-file records (YAML), separate
  from the real-time console logging.
"""
