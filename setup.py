from setuptools import setup, find_packages

setup(
    name='kotoba',
    version='1.0.0',
    packages=find_packages(include=['kotoba', 'kotoba.*']),
    include_package_data=True,
    package_data={'kotoba.lexicon': ['n5_grammar_patterns.yaml']},
    python_requires='>=3.11',
    install_requires=[
        'colored>=2.2.3',
        'halo>=0.0.31',
        'numpy>=1.26.2',
        'python-dotenv>=1.0.0',
        'PyYAML>=6.0.1',
        'tinysegmenter>=0.4'
    ],
    extras_require={
        'test': ['pytest>=7.4'],
    },
    entry_points='''
        [console_scripts]
        kotoba=kotoba.__main__:main
    ''',
    license='MIT',
    keywords='japanese jlpt transcript vocabulary grammar',
    description='JLPT vocabulary and grammar analysis for timestamped Japanese transcripts',
    long_description=open('README.md', encoding='utf-8').read(),
    long_description_content_type='text/markdown',
)
