"""
SmartNote Core - Personal Note Management Backend

Data-access and lifecycle layer for user-owned notes, tags and revision history.

Author: SmartNote Team
Version: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "SmartNote Team"
