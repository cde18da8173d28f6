"""Install picture-it identity and image services."""

from setuptools import setup, find_packages

setup(
    name='picture-it',
    version='0.3.0',
    packages=find_packages(exclude=['*test*']),
    python_requires='>=3.8',
    install_requires=[
        "flask",
        "flask-sqlalchemy",
        "sqlalchemy",
        "pyjwt[crypto]",
        "cryptography",
        "requests",
        "retry",
        "python-dateutil",
        "pytz",
        "wtforms",
        "email-validator",
        "python-json-logger>=3.1",
        "click"
    ],
    extras_require={
        'test': [
            "pytest",
            "hypothesis",
            "jsonschema",
            "mimesis"
        ]
    },
    entry_points={
        'console_scripts': ['picture-it=pictureit.cli:cli']
    },
    zip_safe=False
)
