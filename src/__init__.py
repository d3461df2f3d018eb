"""
Sales Reports
"""
