"""
This package contains the batch pipeline of the GIF Converter.

The pipeline orchestrates a whole run: it discovers the files to convert,
dispatches them to a bounded pool of workers, coordinates the services
(probing, transcoding, compression, filesystem writes), and aggregates the
per-file outcomes into a batch report.
"""
