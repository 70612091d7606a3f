import sys

from collectionview.ui.collection.demo.collection_demo import main


if __name__ == "__main__":
    config_path = sys.argv[1] if len(sys.argv) > 1 else "collectionview.json"
    sys.exit(main(config_path))
