from setuptools import setup, find_packages

with open("Readme.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="watchman-host-metadata",
    version="1.0.0",
    author="Watchman",
    author_email="support@watchman.bj",
    description="Agent qui construit les métadonnées d'hôte et les envoie périodiquement à un intake HTTP.",
    long_description=long_description,
    long_description_content_type='text/markdown',
    include_package_data=True,
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires='>=3.8',
    install_requires=[
        "psutil>=5.9.0",
        "requests>=2.28.0",
        "urllib3>=1.26.0",
        "schedule>=1.2.0",
        "configparser>=5.3.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
    },

    entry_points='''
        [console_scripts]
        watchman-host-metadata=hostmeta.main:main
    '''
)
