from setuptools import setup, find_packages

setup(
    name='firesync',
    version='0.1.0',
    py_modules=['firesync', 'builder', 'devserver'],
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=[
        'lark',
        'pydantic>=2.0',
        'requests',
        'watchdog',
        'fastapi',
        'uvicorn',
    ],
    extras_require={
        'test': [
            'pytest',
            'httpx',
        ],
    },
    entry_points={
        'console_scripts': [
            'firesync = firesync:main',
        ],
    },
)
