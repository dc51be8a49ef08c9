from setuptools import find_packages, setup

package_name = 'rtdb_listener_adapter'

setup(
    name=package_name,
    version='0.1.0',
    packages=find_packages(exclude=['test', 'test.*']),
    package_data={
        package_name: ['config/*.yaml'],
    },
    python_requires='>=3.11',
    install_requires=[
        'setuptools',
        'paho-mqtt>=2.0',
        'pyyaml',
    ],
    zip_safe=True,
    maintainer='hansoo',
    maintainer_email='hansoo@todo.todo',
    description=(
        'Sparse listener specs and single-read futures for realtime '
        'database queries'
    ),
    license='Apache-2.0',
    extras_require={
        'test': [
            'pytest',
        ],
    },
    entry_points={
        'console_scripts': [
            'rtdb_listen = rtdb_listener_adapter.presentation.main:main',
        ],
    },
)
