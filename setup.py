from setuptools import setup, find_packages

install_requires = [
    'celery',
    'Django',
    'djangorestframework',
    'dnspython',
    'redis',
    'requests',
    'urllib3',
]
tests_require = ['pytest<9', 'pytest-django', 'pytest-flake8', 'django-dynamic-fixture']

setup(
    name='subdomains-portal',
    version='1.0.0',
    description="Self-service subdomain provisioning on Cloudflare",
    install_requires=install_requires,
    tests_require=tests_require,
    packages=find_packages(include=['subdomains', 'subdomains.*',
                                    'django_project', 'django_project.*']),
    extras_require={
        'test': tests_require
    },
    classifiers=[
        'Environment :: Web Environment',
        'Framework :: Django',
        'Intended Audience :: Developers',
        'Operating System :: OS Independent',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
    ]
)
