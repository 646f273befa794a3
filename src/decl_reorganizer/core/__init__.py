"""
Core model and services of the declaration reorganizer
"""
