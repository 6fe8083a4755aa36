"""CarePay - telehealth payment orders and Razorpay reconciliation."""
