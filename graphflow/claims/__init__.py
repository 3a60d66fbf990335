"""Tasks and data records for an insurance-claim workflow."""