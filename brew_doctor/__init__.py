"""
Diagnostic runner that inspects a Homebrew installation and reports anything that looks off.
"""

__all__ = ["checks", "cli", "diagnostics", "registry", "report", "scheduler", "system_state", "volumes"]
__version__ = "0.1.0"
