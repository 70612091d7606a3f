"""CollectionView demo application."""
