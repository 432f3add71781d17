"""
Redirect Builder: brandable Android launcher-redirect application builds.

Specializes a fixed "app host" template project for a target package by
staging a workspace, substituting identifiers, installing icon assets and
driving the .NET toolchain to produce an installable APK.
"""

__version__ = "1.0.0"
__author__ = "Redirect Builder Team"
