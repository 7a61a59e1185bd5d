"""
This package contains the core domain models of Media Staging.

The domain layer describes media staging independently of the concrete media
library, codecs or CLI that drive it.

Modules:
    exceptions.py: The exception hierarchy used to report staging failures.
    media.py: Media kinds, file extensions, the abstract `MediaReference` and
              the `ContentHandle` returned when content is requested.
    temp_directory.py: `TempDirectory`, the owned staging directory that is
                       lazily created under the document root.
"""
