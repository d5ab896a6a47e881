"""
Product Catalog Service application package
"""
