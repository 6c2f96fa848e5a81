"""
Generate sample register spreadsheets for testing the Asset Register
"""
import pandas as pd
from pathlib import Path


def generate_register_sample():
    """Generate a register with one complete desktop set, one partial set and ordinary assets"""
    data = {
        'Sr No': [1, 2, 3, 4, 5, 6, 7, 8],
        'Asset Class': [
            'Computer',
            'Computer',
            'Computer',
            'Computer',
            'Computer',
            'Computer',
            'Furniture',
            'Lab Equipment'
        ],
        'Description': [
            '22 inch LED monitor',
            'USB keyboard',
            'Optical mouse',
            'Core i5 desktop CPU',
            '24 inch LED monitor',
            'USB keyboard',
            'Steel almirah',
            'Digital oscilloscope'
        ],
        'Asset Tagging': [
            'SSBAS/Mo/2025-26/T01',
            'SSBAS/Ko/2025-26/T01',
            'SSBAS/Ro/2025-26/T01',
            'SSBAS/Co/2025-26/T01',
            'SSBAS/Mo/2024-25/T02',
            'SSBAS/Ko/2024-25/T02',
            'SSBAS/FUR/2023-24/001',
            'SSBAS/LAB/2022-23/014'
        ],
        'Location': [
            'Computer Lab A',
            'Computer Lab A',
            'Computer Lab A',
            'Computer Lab A',
            'Library',
            'Staff Room',
            'Principal Office',
            'Physics Lab'
        ],
        'Date of Purchase': [
            '2025-07-14',
            '2025-07-14',
            '2025-07-14',
            '2025-07-14',
            '2024-11-02',
            '2024-11-02',
            '2023-06-20',
            '2022-09-05'
        ],
        'Original Cost': [
            '52,000',
            '52,000',
            '52,000',
            '52,000',
            '48,500',
            '48,500',
            '14,200',
            '36,750'
        ],
        'Depreciation Rate': ['40', '40', '40', '40', '40', '40', '10', '15']
    }

    return pd.DataFrame(data)


def generate_csv_sample():
    """Generate a CSV export using camelCase field names as headings"""
    data = {
        'assetTagging': [
            'SSBAS/Mo/2025-26/T10',
            'SSBAS/Co/2025-26/T10',
            'SSBAS/Mo/2025-26/T2'
        ],
        'description': [
            '22 inch LED monitor',
            'Core i3 desktop CPU',
            '19 inch LED monitor'
        ],
        'location': [
            'Computer Lab B',
            'Computer Lab B',
            'Computer Lab C'
        ],
        'originalCost': ['41000', '41000', '39000']
    }

    return pd.DataFrame(data)


if __name__ == '__main__':
    # Create data directory if it doesn't exist
    data_dir = Path(__file__).parent / 'data'
    data_dir.mkdir(exist_ok=True)

    # Generate sample files
    print("Generating sample register files...")

    # Sample 1: Register spreadsheet
    df1 = generate_register_sample()
    file1 = data_dir / 'sample_asset_register.xlsx'
    df1.to_excel(file1, index=False)
    print(f"✓ Created: {file1}")

    # Sample 2: CSV export
    df2 = generate_csv_sample()
    file2 = data_dir / 'sample_register_export.csv'
    df2.to_csv(file2, index=False)
    print(f"✓ Created: {file2}")

    print("\n✨ Sample files created successfully!")
    print(f"\nFiles are located in: {data_dir}")
    print("Upload them with: curl -F file=@data/sample_asset_register.xlsx http://localhost:8000/assets/upload")
