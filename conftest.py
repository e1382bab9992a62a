"""Root conftest, loaded before any test module imports."""

import os

# CI runners often export FORCE_COLOR=1, which makes Rich add ANSI escape
# codes to CLI output and breaks tests that parse stdout as JSON. Clear it
# before any Console() is created.
os.environ.pop("FORCE_COLOR", None)
os.environ["NO_COLOR"] = "1"
