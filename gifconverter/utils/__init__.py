"""
Utilities Package for the GIF Converter.

Modules:
    - ffmpeg_utils.py: Locates the ffmpeg/ffprobe executables (system PATH or
      the directory configured in `config.user.yaml`) and verifies them at
      startup.
    - format_utils.py: Helpers for presenting sizes in log messages.
"""
