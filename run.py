#!/usr/bin/env python3
"""
cloudcontext command-line launcher

Usage:
    python run.py spec s3                          # Show resolved settings for s3
    python run.py spec s3 -c custom.json           # Layer a custom config file
    python run.py spec s3 -D s3.endpoint=https://… # Override one setting
    python run.py sign atmos bucket/file.txt       # Print a share URL
    python run.py sign atmos bucket/file.txt --ttl 600 -v
"""

import sys
from cloudcontext.cli import main

if __name__ == "__main__":
    sys.exit(main())
