"""Setup configuration for the RFP Assistant package."""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="rfp-assistant",
    version="0.1.0",
    author="RFP Assistant Contributors",
    description="RFP spreadsheet ingestion into Pinecone and retrieval-augmented answers",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=[
        "google-genai>=1.0.0",
        "openai>=1.0.0",
        "pinecone>=5.0.0",
        "openpyxl>=3.1.0",
        "requests>=2.31.0",
        "urllib3>=1.26.0",
        "python-dotenv>=1.0.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "rfp-assistant=rfp_assistant.main:main",
        ],
    },
)
