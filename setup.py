from setuptools import setup, find_packages

setup(
    name="legato",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "z3-solver>=4.8.12",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        'console_scripts': [
            'legato-verify=legato.cli:main',
        ],
    },
    description="Symbolic Mostek model and correctness proof of Legato's 8-bit multiplier",
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.8",
)
