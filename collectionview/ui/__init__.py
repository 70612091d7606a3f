"""
collectionview UI components.
"""
