# test_all.py
import os
import unittest

ROOT = os.path.dirname(os.path.abspath(__file__))


def load_tests(loader, tests, pattern):
    return loader.discover(os.path.join(ROOT, "tests"), pattern="test_*.py")


if __name__ == "__main__":
    unittest.main()
