import setuptools

with open('README.md', 'r', encoding='utf-8') as fh:
    long_description = fh.read()

setuptools.setup(
    name='buildkeeper',
    author='buildkeeper maintainers',
    description='Small CI chores: ship build logs to object storage and list repository readers',
    keywords='ci, jenkins, logs, s3, github',
    long_description=long_description,
    long_description_content_type='text/markdown',
    version='0.3.0',
    packages=setuptools.find_packages(include=['buildkeeper', 'buildkeeper.*']),
    classifiers=[
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3 :: Only',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
    ],
    python_requires='>=3.10',
    install_requires=[
        'fastcore',
        'ghapi',
        'pydantic>=2.7',
        'pydantic-settings>=2.3',
        'python-dotenv',
        'pyyaml',
        'rich',
        'typing-extensions',
    ],
    extras_require={
        'dev': [
            'pytest',
        ],
    },
    entry_points={
        'console_scripts': [
            'buildkeeper=buildkeeper.run.run:main',
        ],
    },
    include_package_data=True,
)
