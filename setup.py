from setuptools import setup, find_packages

setup(
    name='fbTimeCheck',
    version='1.0.0',
    description='A CLI tool for checking FreshBooks time entries of a whole team and exporting Excel/PDF reports.',
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=[
        'requests',
        'tabulate',
        'rich',
        'python-dotenv',
        'openpyxl',
        'jinja2',
        'weasyprint',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'fbtimecheck=fbtimecheck.__main__:main',
        ],
    },
    include_package_data=True,
    package_data={
        'fbtimecheck': ['templates/*.html'],
    },
    python_requires='>=3.8',
    classifiers=[
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
    ],
)
