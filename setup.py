from setuptools import setup, find_packages

setup(
    name="cookparse",
    version="1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"cookparse.parser": ["grammar.peg"]},
    description="A parser for the Cooklang recipe markup language.",
    install_requires=["peggie>=0.2.0", "PyYAML"],
    extras_require={"test": ["pytest"]},
    entry_points={
        "console_scripts": [
            "cookparse-check=cookparse.scripts.cookparse_check:main",
        ],
    },
)
