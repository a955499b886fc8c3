import sys

from pdf_ingest.cli import main

sys.exit(main())
