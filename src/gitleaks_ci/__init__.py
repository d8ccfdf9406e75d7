"""Scan GitHub pushes and pull requests for secrets with gitleaks.

gitleaks-ci helps you:
- Install a pinned (or the latest) gitleaks release, with tool caching
- Scan exactly the commits a push or pull request introduced
- Report findings in the job summary, as a SARIF artifact and as PR review comments
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
