"""
                Bistro Express

Restaurant ordering and management backend: menu browsing, order
placement, a kitchen status workflow and daily sales reporting.

Author: Khalil Bannouri
Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
__author__ = "Khalil Bannouri"
