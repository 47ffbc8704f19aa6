from setuptools import setup, find_packages

setup(
    name='pingreport',
    version='0.1.0',
    description='ICMP reachability probing with statistics and plain-text reports',
    long_description=open('README.md', encoding='utf-8').read(),
    long_description_content_type='text/markdown',
    packages=find_packages(exclude=['tests']),
    python_requires='>=3.7',
    install_requires=['rich'],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'pingreport=pingreport.cli:main',
        ],
    },
    classifiers=[
        'Programming Language :: Python :: 3',
        'Operating System :: POSIX :: Linux',
        'Intended Audience :: System Administrators',
        'License :: OSI Approved :: MIT License',
        'Topic :: System :: Networking :: Monitoring',
    ],
    license='MIT',
    include_package_data=True,
)
