import sys

from shopify_notion_sync.cli import main

sys.exit(main())
