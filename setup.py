from setuptools import setup, find_packages

setup(
    name="ssh-debugger",
    version="0.1.0",
    description="Deploy .NET applications to Linux hosts over SSH and launch a remote debugging session",
    author="",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.8",
    install_requires=[
        "paramiko>=3.4.0",
        "pyyaml>=6.0.1",
        "click>=8.1.7",
        "tqdm>=4.66.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "ssh-debugger=sshdebugger.cli:main",
        ],
    },
    include_package_data=True,
)
