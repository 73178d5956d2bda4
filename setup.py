"""Setup for Sprout.

Install for development:
    pip install -e ".[test]"

Build a macOS .app bundle:
    pip install py2app
    python setup.py py2app
"""

from setuptools import setup, find_packages

APP = ["main.py"]
DATA_FILES = []
OPTIONS = {
    "argv_emulation": False,
    "iconfile": None,
    "plist": {
        "CFBundleName": "Sprout",
        "CFBundleDisplayName": "Sprout",
        "CFBundleIdentifier": "com.sprout.timer",
        "CFBundleVersion": "0.1.0",
        "CFBundleShortVersionString": "0.1.0",
        "LSUIElement": True,
        "NSHighResolutionCapable": True,
        "LSMinimumSystemVersion": "13.0",
    },
}

setup(
    app=APP,
    data_files=DATA_FILES,
    options={"py2app": OPTIONS},
    name="sprout-timer",
    version="0.1.0",
    packages=find_packages(include=["sprout", "sprout.*"]),
    python_requires=">=3.10",
    install_requires=[
        "PyQt6>=6.5",
        "SQLAlchemy>=2.0",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "gui_scripts": ["sprout = sprout.__main__:main"],
    },
)
