"""
Run script for the Logistik ERP frontend
"""
import os
import sys

# Make logistik_web importable without installing the package
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from logistik_web import app

if __name__ == '__main__':
    app.run(debug=os.getenv('FLASK_DEBUG', '1') == '1', port=int(os.getenv('PORT', '5000')), host='0.0.0.0')
