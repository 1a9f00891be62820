"""
mb4migrate - online utf8mb4 / row format conversion script generator
"""
