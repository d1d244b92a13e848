import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="utxo-trie",
    version="0.1.0",
    author="Igor Aleksanov",
    author_email="popzxc@yandex.com",
    description="An insert-only trie stored as individually spendable UTxOs",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(exclude=["tests"]),
    install_requires=[
        'cbor2>=5.4',
        'pycryptodome>=3.18',
    ],
    entry_points={
        'console_scripts': [
            'utxo-trie=utxo_trie.cli:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Topic :: Security :: Cryptography",
    ],
)
