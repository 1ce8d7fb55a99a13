import sys
import os
import pytest

# Add project root to sys.path
sys.path.append(os.getcwd())

# Run pytest programmatically
exit_code = pytest.main(["tests/", "-v"])
sys.exit(exit_code)
