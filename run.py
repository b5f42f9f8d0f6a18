#!/usr/bin/env python3
"""
Cloud Storage XML Multipart Upload Client

Run this script to drive the multipart upload API from a checkout
without installing the package.

Usage:
    python run.py initiate my-bucket big.bin              # Start an upload
    python run.py list-uploads my-bucket                  # Show open uploads
    python run.py list-parts my-bucket big.bin UPLOAD_ID  # Show parts
    python run.py -j results.json abort my-bucket big.bin UPLOAD_ID
"""

import sys
from gcs_multipart.cli import main

if __name__ == "__main__":
    sys.exit(main())
