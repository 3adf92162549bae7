import os
import tempfile

# Keep log files and cookie/database defaults out of the working tree.
os.environ.setdefault("SEI_CRAWLER_DATA_DIR", tempfile.mkdtemp(prefix="sei-crawler-tests-"))
