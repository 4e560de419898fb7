"""Allow running as ``python -m ai_prompt_core.prompt_compiler``."""

import sys

from .cli import main

sys.exit(main())
