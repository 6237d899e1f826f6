# Counterfeit report mailed to the regulator. Placeholders are filled with str.format,
# so literal CSS braces are doubled.
HTML = """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <style>
        body {{ font-family: Helvetica, Arial, sans-serif; color: #222; line-height: 1.5; }}
        .container {{ max-width: 640px; margin: 24px auto; border: 1px solid #e2e2e2; border-radius: 6px; }}
        .header {{ background: #b00020; color: #fff; padding: 16px 24px; }}
        .header h2 {{ margin: 0; font-size: 20px; }}
        .content {{ padding: 24px; }}
        .content table {{ width: 100%; border-collapse: collapse; margin-top: 8px; }}
        .content th {{ background: #f5f5f5; width: 35%; }}
        .content th, .content td {{ border-bottom: 1px solid #eee; padding: 8px 10px; text-align: left; vertical-align: top; }}
        .footer {{ padding: 12px 24px; font-size: 12px; color: #888; border-top: 1px solid #eee; }}
    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h2>URGENT: Counterfeit Drug Report ({severity})</h2>
        </div>
        <div class="content">
            <p>To the Drug Regulatory Anti-Counterfeit Desk,</p>
            <p>A suspected counterfeit drug was reported by a member of the community through the <strong>MedVerify</strong> platform. Report reference: <strong>#{report_id}</strong>.</p>
            <p>Photos supplied by the reporter, if any, are attached.</p>

            <h3>Report Details:</h3>
            <table>
                <tr>
                    <th>Drug Name</th>
                    <td>{drug_name}</td>
                </tr>
                <tr>
                    <th>Batch Number</th>
                    <td>{batch_number}</td>
                </tr>
                <tr>
                    <th>Manufacturer</th>
                    <td>{manufacturer}</td>
                </tr>
                <tr>
                    <th>Description</th>
                    <td>{description}</td>
                </tr>
                <tr>
                    <th>Symptoms Reported</th>
                    <td>{symptoms}</td>
                </tr>
                <tr>
                    <th>Location</th>
                    <td>{location}</td>
                </tr>
                <tr>
                    <th>Purchased At</th>
                    <td>{purchase_location}</td>
                </tr>
            </table>

            <p style="margin-top: 20px;">Reports are aggregated by location to surface counterfeit hotspots. Please review the attached photos.</p>
            <p>Thank you,</p>
            <p><strong>The MedVerify Platform</strong></p>
        </div>
        <div class="footer">
            <p>&copy; MedVerify. Keeping medicines safe.</p>
        </div>
    </div>
</body>
</html>
"""
