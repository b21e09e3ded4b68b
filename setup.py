#!/usr/bin/env python3

from setuptools import setup

version = '1.0.0'
author = 'Azaria Zornberg'
email = 'a.zornberg96@gmail.com'
license_str = 'MIT License'
url = 'https://github.com/zorn96/realm_ad/'
description = 'Python library for provisioning Active Directory computer accounts for hosts'
package_name = 'realm_ad'
package_folder = '.'

long_description = open('README.md', encoding='utf-8').read()
packages = ['realm_ad',
            'realm_ad.core',
            'realm_ad.environment',
            'realm_ad.environment.discovery',
            'realm_ad.environment.kerberos',
            'realm_ad.environment.ldap',
            'realm_ad.environment.security'
            ]


setup_kwargs = {
    'packages': packages,
    'package_dir': {'': package_folder},
}

requirements = ['dnspython>=2.1.0',
                'ldap3>=2.9.0',
                'PyYAML>=5.4',
                ]

extras_requirements = {
    # gssapi builds against the system kerberos libraries, so it's only pulled in when asked for
    'kerberos': ['gssapi>=1.6.0'],
    'test': ['pytest>=7.0',
             'hypothesis>=6.0',
             ],
}

setup(name=package_name,
      version=version,
      install_requires=requirements,
      extras_require=extras_requirements,
      license=license_str,
      author=author,
      author_email=email,
      description=description,
      long_description=long_description,
      long_description_content_type='text/markdown',
      keywords='python3 ldap microsoft windows active-directory kerberos ad realm provisioning',
      python_requires=">=3.7",
      url=url,
      classifiers=['Development Status :: 4 - Beta',
                   'Intended Audience :: Developers',
                   'Intended Audience :: Information Technology',
                   'Intended Audience :: System Administrators',
                   'License :: OSI Approved :: MIT License',
                   'Operating System :: POSIX :: Linux',
                   'Programming Language :: Python',
                   'Programming Language :: Python :: 3',
                   'Topic :: Security',
                   'Topic :: Software Development :: Libraries :: Python Modules',
                   'Topic :: System :: Systems Administration :: Authentication/Directory :: LDAP'],
      **setup_kwargs
      )
