import unittest


class SmokeTest(unittest.TestCase):
    def test_import_domain_modules(self):
        import load_planner  # noqa: F401
        import load_planner.advisory  # noqa: F401
        import load_planner.config  # noqa: F401
        import load_planner.fit  # noqa: F401
        import load_planner.io  # noqa: F401
        import load_planner.models  # noqa: F401
        import load_planner.packing  # noqa: F401
        import load_planner.planner  # noqa: F401
        import load_planner.reporting  # noqa: F401
        import load_planner.strategies  # noqa: F401


if __name__ == '__main__':
    unittest.main()
