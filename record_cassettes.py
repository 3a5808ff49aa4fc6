"""
Script to record VCR cassettes with real HTTP interactions.

Run this once with real credentials to create the cassettes replayed by
tests/test_live.py.
"""

import subprocess
import sys
from pathlib import Path


def check_credentials() -> bool:
    """Check if credentials are available."""
    from dataminer.config import LoginDetails

    settings = LoginDetails()
    return bool(settings.username and settings.password)


def main() -> int:
    """Record VCR cassettes."""
    print("VCR CASSETTE RECORDING SCRIPT")
    print("=" * 40)

    if not check_credentials():
        print("Missing credentials!")
        print("Please set up dataminer/.env with:")
        print("   DATAMINER_USERNAME=your_email")
        print("   DATAMINER_PASSWORD=your_password")
        return 1

    print("Credentials found, recording real HTTP interactions...")
    cmd = [sys.executable, "-m", "pytest", "tests/test_live.py", "-m", "live", "-v", "-s"]

    try:
        subprocess.run(cmd, check=True)
    except subprocess.CalledProcessError as e:
        print(f"Recording failed: {e}")
        return 1

    cassettes = sorted(Path("tests/cassettes").glob("*.yaml"))
    if cassettes:
        print("Created cassettes:")
        for cassette in cassettes:
            print(f"   - {cassette.name}")
    else:
        print("No cassettes found")

    print("Now run the replay tests:")
    print("   pytest tests/test_live.py -v")
    return 0


if __name__ == "__main__":
    sys.exit(main())
