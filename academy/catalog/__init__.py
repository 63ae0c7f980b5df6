"""Catalog context: courses, lessons, enrollments and reviews."""
