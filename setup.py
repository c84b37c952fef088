#!/usr/bin/python3
exec(compile(open("fedora_session/release.py").read(),
             "fedora_session/release.py", 'exec'))

from setuptools import find_packages, setup

setup(
    name=NAME,
    version=VERSION,
    description=DESCRIPTION,
    long_description=LONG_DESCRIPTION,
    author=AUTHOR,
    author_email=EMAIL,
    license=LICENSE,
    keywords='Fedora Python Webservices OpenID',
    url=URL,
    packages=find_packages(exclude=['tests', 'tests.*']),
    include_package_data=True,
    python_requires='>=3.6',
    install_requires=[
        'munch',
        'kitchen',
        'requests',
        'beautifulsoup4',
        'lockfile',
    ],
    extras_require={
        'test': ['pytest', 'mock'],
    },
    scripts=['clients/try-login.py'],
    classifiers=[
        'Development Status :: 7 - Inactive',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: GNU Lesser General Public License v2 or later (LGPLv2+)',
        'Programming Language :: Python :: 3',
        'Topic :: Internet :: WWW/HTTP',
        'Topic :: Software Development :: Libraries :: Python Modules',
    ],
)
