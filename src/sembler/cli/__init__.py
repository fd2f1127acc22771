"""
Sembler Command-Line Interface
==============================

- **sasm**: assembler (source file in, JSON result out)

Implemented as a Click-based CLI application.
"""

__all__ = ["sasm"]
