"""mini-s3: a local-filesystem object store with checksum-verified streaming."""

__version__ = "0.1.0"
