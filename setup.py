# setup.py
from setuptools import setup, find_packages
from pathlib import Path
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding="utf-8")

setup(
    name="lexscan",
    version="0.1.0",
    package_dir={"": "src"},
    packages=find_packages(where="src", include=["lexscan", "lexscan.*"]),
    description="Text extraction for uploaded legal documents: PDF text layer first, OCR per page when there is none.",
    long_description=long_description,
    long_description_content_type='text/markdown',
    python_requires=">=3.9",

    install_requires=[
        "PyMuPDF",
        "pytesseract",
        "Pillow",
        "numpy",
        "tqdm",
        "python-slugify",
    ],
    extras_require={
        "easyocr": ["easyocr", "torch"],
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'lexscan=lexscan.cli:main',
        ],
    },
)
