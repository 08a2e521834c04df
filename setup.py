# setup.py
from setuptools import setup, find_packages

setup(
    name='ruikit',
    version='0.1.0',
    description='A server-driven UI toolkit: Python views and themes rendered as HTML/CSS in the browser.',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',

    # finds `ruikit`, `ruikit.window` and `ruikit_cli`; tests ship inside the package
    packages=find_packages(exclude=['ruikit.tests']),

    # the browser script and stylesheet served at /app.js and /app.css
    package_data={
        'ruikit': ['static/*.js', 'static/*.css'],
    },

    install_requires=[
        'PyYAML',
        'typer',
        'fastapi',
        'uvicorn',
    ],
    extras_require={
        # `ruikit serve --window` shows the app in a Qt web view
        'desktop': ['PySide6'],
        'test': ['pytest', 'httpx'],
    },

    # It creates an executable script named `ruikit` that calls the `app`
    # object inside `ruikit_cli.main`.
    entry_points={
        'console_scripts': [
            'ruikit = ruikit_cli.main:app',
        ],
    },

    classifiers=[
        'Programming Language :: Python :: 3',
        'Operating System :: OS Independent',
        'Intended Audience :: Developers',
        'Topic :: Software Development :: User Interfaces',
    ],
    python_requires='>=3.10',
)
