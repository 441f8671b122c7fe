from setuptools import setup, find_packages

setup(
    name="jsoutline",
    version="0.1.0",
    description="jsoutline - outline parser and code model for service provider scripts",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    author="jsoutline Project",
    python_requires=">=3.9",
    packages=find_packages(),
    classifiers=[
        "Programming Language :: Python :: 3",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Topic :: Text Editors :: Integrated Development Environments (IDE)",
    ],
)
