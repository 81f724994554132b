"""
PyDispatchTimer Test Package

License: LGPLv3.0
Copyright (C) 2025-2026 Kris Kirby, KE4AHR
"""
