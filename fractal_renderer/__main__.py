"""
Allow running the package directly: python -m fractal_renderer
"""
import sys

from .cli import main

sys.exit(main())
