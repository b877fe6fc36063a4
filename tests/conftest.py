"""
Pytest configuration so tests import badge_card_renderer from the checkout.
"""

# Standard Library
import os
import sys


#============================================
def _ensure_repo_on_path() -> None:
	"""
	Put the repository root first on sys.path when it is missing.
	"""
	repo_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
	if repo_root not in sys.path:
		sys.path.insert(0, repo_root)


_ensure_repo_on_path()
