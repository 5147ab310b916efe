"""
Sentinel-G - REST API Module
"""
