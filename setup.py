"""
RouteMap - Geocoding Gateway & Route Client

Installs the routemap package (FastAPI geocoding proxy + asyncio route client).
"""

from setuptools import setup, find_packages


setup(
    name='routemap',
    version='1.0.0',
    author='RouteMap Team',
    description='Geocoding gateway and driving-route map client',
    long_description='''
    FastAPI gateway that proxies place-name geocoding to Nominatim, and an
    asyncio client that resolves two places, fetches an OSRM driving route
    and renders it on a Leaflet map with folium.
    ''',
    packages=find_packages(include=['routemap', 'routemap.*']),
    install_requires=[
        'fastapi>=0.110.0,<0.137',
        'uvicorn[standard]>=0.27.0',
        'pydantic>=2.0',
        'python-dotenv>=1.0.0',
        'httpx>=0.27.0',
        'folium>=0.15.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
            'pytest-asyncio>=0.23',
            'pytest-mock>=3.10',
        ],
    },
    entry_points={
        'console_scripts': [
            'routemap-server=routemap.main:run_server',
            'routemap-route=routemap.client.__main__:main',
        ],
    },
    zip_safe=False,
    python_requires='>=3.9',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'Topic :: Scientific/Engineering :: GIS',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
    ],
)
