"""
Student Information System

Backend for managing students, teachers and institutions, and for matching
students with the financial-aid schemes they are eligible for.
"""

__version__ = "1.0.0"
__author__ = "SIS Team"
__description__ = "Student information and scheme recommendation backend"
