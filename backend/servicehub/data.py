"""Seed records for the in-memory marketplace.

The stores copy these on startup and on ``reset()``; nothing here is mutated.
"""

AVATAR_PLACEHOLDER = "/placeholder.svg?height=40&width=40"
SERVICE_IMAGE_PLACEHOLDER = "/placeholder.svg?height=200&width=300"

users = [
    {
        "id": "admin-1",
        "email": "admin@example.com",
        "password": "admin123",
        "full_name": "System Admin",
        "phone": "+1234567890",
        "role": "admin",
        "is_approved": True,
        "created_at": "2024-01-01T00:00:00Z",
        "updated_at": "2024-01-01T00:00:00Z",
    },
    {
        "id": "provider-1",
        "email": "provider@example.com",
        "password": "provider123",
        "full_name": "Sarah Johnson",
        "phone": "+1234567891",
        "role": "provider",
        "is_approved": True,
        "created_at": "2024-01-02T00:00:00Z",
        "updated_at": "2024-01-02T00:00:00Z",
    },
    {
        "id": "provider-2",
        "email": "mike@example.com",
        "password": "mike123",
        "full_name": "Mike Wilson",
        "phone": "+1234567892",
        "role": "provider",
        "is_approved": True,
        "created_at": "2024-01-03T00:00:00Z",
        "updated_at": "2024-01-03T00:00:00Z",
    },
    {
        "id": "provider-3",
        "email": "alex@example.com",
        "password": "alex123",
        "full_name": "Alex Rodriguez",
        "phone": "+1234567893",
        "role": "provider",
        "is_approved": True,
        "created_at": "2024-01-04T00:00:00Z",
        "updated_at": "2024-01-04T00:00:00Z",
    },
    {
        "id": "client-1",
        "email": "client@example.com",
        "password": "client123",
        "full_name": "Jane Client",
        "phone": "+0987654321",
        "role": "client",
        "is_approved": True,
        "created_at": "2024-01-05T00:00:00Z",
        "updated_at": "2024-01-05T00:00:00Z",
    },
    {
        "id": "client-2",
        "email": "john@example.com",
        "password": "john123",
        "full_name": "John Doe",
        "phone": "+0987654322",
        "role": "client",
        "is_approved": True,
        "created_at": "2024-01-06T00:00:00Z",
        "updated_at": "2024-01-06T00:00:00Z",
    },
]

categories = [
    {"id": "cat-1", "name": "Beauty & Spa", "description": "Beauty and spa services", "icon": "Sparkles"},
    {"id": "cat-2", "name": "Healthcare", "description": "Medical and healthcare services", "icon": "Heart"},
    {"id": "cat-3", "name": "Fitness", "description": "Fitness and wellness services", "icon": "Dumbbell"},
    {"id": "cat-4", "name": "Education", "description": "Educational and tutoring services", "icon": "BookOpen"},
    {"id": "cat-5", "name": "Business", "description": "Business and professional services", "icon": "Briefcase"},
]
for _category in categories:
    _category["created_at"] = "2024-01-01T00:00:00Z"

services = [
    {
        "id": "service-1",
        "provider_id": "provider-1",
        "category_id": "cat-1",
        "name": "Hair Cut & Styling",
        "description": "Professional hair cutting and styling service with the latest trends and techniques. Perfect for any occasion.",
        "price": 50,
        "duration": 60,
        "created_at": "2024-01-10T00:00:00Z",
    },
    {
        "id": "service-2",
        "provider_id": "provider-2",
        "category_id": "cat-1",
        "name": "Relaxing Massage",
        "description": "Full body relaxing massage to relieve stress and tension. Perfect for unwinding after a long day.",
        "price": 80,
        "duration": 90,
        "created_at": "2024-01-11T00:00:00Z",
    },
    {
        "id": "service-3",
        "provider_id": "provider-3",
        "category_id": "cat-3",
        "name": "Personal Training",
        "description": "One-on-one personal training session tailored to your fitness goals and current level.",
        "price": 75,
        "duration": 60,
        "created_at": "2024-01-12T00:00:00Z",
    },
    {
        "id": "service-4",
        "provider_id": "provider-1",
        "category_id": "cat-2",
        "name": "Dental Checkup",
        "description": "Comprehensive dental examination including cleaning and oral health assessment.",
        "price": 120,
        "duration": 45,
        "created_at": "2024-01-13T00:00:00Z",
    },
    {
        "id": "service-5",
        "provider_id": "provider-2",
        "category_id": "cat-4",
        "name": "Math Tutoring",
        "description": "Expert math tutoring for high school and college students. All levels welcome.",
        "price": 40,
        "duration": 60,
        "created_at": "2024-01-14T00:00:00Z",
    },
    {
        "id": "service-6",
        "provider_id": "provider-3",
        "category_id": "cat-5",
        "name": "Business Consulting",
        "description": "Strategic business consulting to help grow your business and improve operations.",
        "price": 150,
        "duration": 120,
        "created_at": "2024-01-15T00:00:00Z",
    },
    {
        "id": "service-7",
        "provider_id": "provider-1",
        "category_id": "cat-1",
        "name": "Facial Treatment",
        "description": "Deep cleansing facial treatment for all skin types. Includes exfoliation and moisturizing.",
        "price": 65,
        "duration": 75,
        "created_at": "2024-01-16T00:00:00Z",
    },
    {
        "id": "service-8",
        "provider_id": "provider-2",
        "category_id": "cat-3",
        "name": "Yoga Class",
        "description": "Relaxing yoga session suitable for beginners and advanced practitioners.",
        "price": 30,
        "duration": 60,
        "created_at": "2024-01-17T00:00:00Z",
    },
]
for _service in services:
    _service["updated_at"] = _service["created_at"]
    _service["is_active"] = True

appointments = [
    {
        "id": "apt-1",
        "client_id": "client-1",
        "provider_id": "provider-1",
        "service_id": "service-1",
        "appointment_date": "2024-02-15T14:00:00Z",
        "status": "confirmed",
        "notes": "First time client, please be gentle",
        "total_amount": 50,
        "commission_amount": 5,
        "paid_at": "2024-02-01T00:00:00Z",
        "created_at": "2024-02-01T00:00:00Z",
        "updated_at": "2024-02-01T00:00:00Z",
    },
    {
        "id": "apt-2",
        "client_id": "client-1",
        "provider_id": "provider-2",
        "service_id": "service-2",
        "appointment_date": "2024-02-16T10:00:00Z",
        "status": "pending",
        "notes": "Need relaxing massage after work stress",
        "total_amount": 80,
        "commission_amount": 8,
        "created_at": "2024-02-02T00:00:00Z",
        "updated_at": "2024-02-02T00:00:00Z",
    },
    {
        "id": "apt-3",
        "client_id": "client-2",
        "provider_id": "provider-1",
        "service_id": "service-1",
        "appointment_date": "2024-01-20T16:00:00Z",
        "status": "completed",
        "notes": "Regular customer",
        "total_amount": 50,
        "commission_amount": 5,
        "paid_at": "2024-01-20T00:00:00Z",
        "created_at": "2024-01-15T00:00:00Z",
        "updated_at": "2024-01-20T00:00:00Z",
    },
    {
        "id": "apt-4",
        "client_id": "client-1",
        "provider_id": "provider-3",
        "service_id": "service-3",
        "appointment_date": "2024-01-25T09:00:00Z",
        "status": "completed",
        "notes": "Focus on cardio training",
        "total_amount": 75,
        "commission_amount": 7.5,
        "paid_at": "2024-01-25T00:00:00Z",
        "created_at": "2024-01-20T00:00:00Z",
        "updated_at": "2024-01-25T00:00:00Z",
    },
    {
        "id": "apt-5",
        "client_id": "client-2",
        "provider_id": "provider-2",
        "service_id": "service-5",
        "appointment_date": "2024-02-20T15:00:00Z",
        "status": "confirmed",
        "notes": "Help with calculus homework",
        "total_amount": 40,
        "commission_amount": 4,
        "paid_at": "2024-02-05T00:00:00Z",
        "created_at": "2024-02-05T00:00:00Z",
        "updated_at": "2024-02-05T00:00:00Z",
    },
    {
        "id": "apt-6",
        "client_id": "client-1",
        "provider_id": "provider-1",
        "service_id": "service-7",
        "appointment_date": "2024-01-18T11:00:00Z",
        "status": "cancelled",
        "notes": "Client cancelled due to emergency",
        "total_amount": 65,
        "commission_amount": 6.5,
        "paid_at": "2024-01-15T00:00:00Z",
        "created_at": "2024-01-15T00:00:00Z",
        "updated_at": "2024-01-18T00:00:00Z",
    },
]

reviews = [
    {
        "id": "review-1",
        "client_id": "client-2",
        "provider_id": "provider-1",
        "service_id": "service-1",
        "appointment_id": "apt-3",
        "rating": 5,
        "comment": "Excellent service! Very professional and the results exceeded my expectations.",
        "created_at": "2024-01-21T00:00:00Z",
    },
    {
        "id": "review-2",
        "client_id": "client-1",
        "provider_id": "provider-3",
        "service_id": "service-3",
        "appointment_id": "apt-4",
        "rating": 4,
        "comment": "Great workout session. Alex really knows how to motivate and push you to your limits.",
        "created_at": "2024-01-26T00:00:00Z",
    },
    {
        "id": "review-3",
        "client_id": "client-2",
        "provider_id": "provider-2",
        "service_id": "service-2",
        "appointment_id": "apt-6",
        "rating": 5,
        "comment": "Amazing massage! I felt so relaxed afterwards. Will definitely book again.",
        "created_at": "2024-01-28T00:00:00Z",
    },
]

favorites = [
    {"id": "fav-1", "client_id": "client-1", "service_id": "service-1", "created_at": "2024-01-20T00:00:00Z"},
    {"id": "fav-2", "client_id": "client-1", "service_id": "service-2", "created_at": "2024-01-21T00:00:00Z"},
    {"id": "fav-3", "client_id": "client-2", "service_id": "service-3", "created_at": "2024-01-22T00:00:00Z"},
]

promotions = [
    {
        "id": "promo-1",
        "provider_id": "provider-1",
        "code": "WELCOME20",
        "description": "20% off for new customers",
        "discount_type": "percentage",
        "discount_value": 20,
        "min_amount": 30,
        "max_uses": 100,
        "used_count": 15,
        "start_date": "2024-01-01T00:00:00Z",
        "end_date": "2030-12-31T23:59:59Z",
        "is_active": True,
        "created_at": "2024-01-01T00:00:00Z",
    },
    {
        "id": "promo-2",
        "provider_id": "provider-2",
        "code": "RELAX10",
        "description": "$10 off massage services",
        "discount_type": "fixed",
        "discount_value": 10,
        "min_amount": 50,
        "max_uses": 50,
        "used_count": 8,
        "start_date": "2024-02-01T00:00:00Z",
        "end_date": "2024-02-29T23:59:59Z",
        "is_active": True,
        "created_at": "2024-02-01T00:00:00Z",
    },
]

refunds = [
    {
        "id": "refund-1",
        "appointment_id": "apt-6",
        "client_id": "client-1",
        "provider_id": "provider-1",
        "amount": 65,
        "reason": "Service was cancelled by provider",
        "status": "approved",
        "requested_at": "2024-01-18T12:00:00Z",
        "processed_at": "2024-01-18T14:00:00Z",
        "admin_notes": "Approved due to provider cancellation",
        "refund_method": "original_payment",
    },
    {
        "id": "refund-2",
        "appointment_id": "apt-4",
        "client_id": "client-1",
        "provider_id": "provider-3",
        "amount": 75,
        "reason": "Service quality was not satisfactory",
        "status": "pending",
        "requested_at": "2024-01-26T10:00:00Z",
        "processed_at": None,
        "admin_notes": None,
        "refund_method": "original_payment",
    },
    {
        "id": "refund-3",
        "appointment_id": "apt-3",
        "client_id": "client-2",
        "provider_id": "provider-1",
        "amount": 25,
        "reason": "Partial refund for late service",
        "status": "rejected",
        "requested_at": "2024-01-21T09:00:00Z",
        "processed_at": "2024-01-21T15:00:00Z",
        "admin_notes": "Service was completed as scheduled",
        "refund_method": "original_payment",
    },
]

notifications = [
    {
        "id": "notif-1",
        "user_id": "provider-1",
        "title": "New Appointment Booked",
        "message": "Jane Client has booked Hair Cut & Styling for Feb 15, 2024 at 2:00 PM",
        "type": "appointment",
        "is_read": False,
        "created_at": "2024-02-01T00:00:00Z",
    },
    {
        "id": "notif-2",
        "user_id": "client-1",
        "title": "Appointment Confirmed",
        "message": "Your Hair Cut & Styling appointment has been confirmed for Feb 15, 2024 at 2:00 PM",
        "type": "appointment",
        "is_read": True,
        "created_at": "2024-02-01T01:00:00Z",
    },
    {
        "id": "notif-3",
        "user_id": "provider-2",
        "title": "Payment Received",
        "message": "Payment of $80 received for Relaxing Massage service",
        "type": "payment",
        "is_read": False,
        "created_at": "2024-02-02T00:00:00Z",
    },
    {
        "id": "notif-p2",
        "user_id": "provider-1",
        "title": "Payment Received",
        "message": "Payment of $50.00 received for Hair Cut & Styling service",
        "type": "payment",
        "is_read": False,
        "created_at": "2024-02-10T09:30:00Z",
    },
    {
        "id": "notif-p3",
        "user_id": "provider-1",
        "title": "New Review Received",
        "message": "John Doe left a 5-star review for your Hair Cut & Styling service",
        "type": "review",
        "is_read": True,
        "created_at": "2024-02-09T16:45:00Z",
    },
    {
        "id": "notif-p5",
        "user_id": "provider-1",
        "title": "Monthly Revenue Report",
        "message": "Your January revenue report is ready. Total earnings: $1,250.00",
        "type": "report",
        "is_read": False,
        "created_at": "2024-02-01T08:00:00Z",
    },
    {
        "id": "notif-p6",
        "user_id": "provider-1",
        "title": "Profile Update Required",
        "message": "Please update your service availability for the upcoming week",
        "type": "system",
        "is_read": True,
        "created_at": "2024-01-30T12:00:00Z",
    },
    {
        "id": "notif-c2",
        "user_id": "client-1",
        "title": "Payment Successful",
        "message": "Payment of $50.00 for Hair Cut & Styling has been processed successfully",
        "type": "payment",
        "is_read": False,
        "created_at": "2024-02-10T09:30:00Z",
    },
    {
        "id": "notif-c3",
        "user_id": "client-1",
        "title": "Appointment Reminder",
        "message": "Don't forget your appointment tomorrow at 2:00 PM with Sarah Johnson",
        "type": "reminder",
        "is_read": True,
        "created_at": "2024-02-14T09:00:00Z",
    },
    {
        "id": "notif-c4",
        "user_id": "client-1",
        "title": "New Service Available",
        "message": "Sarah Johnson has added a new service: Facial Treatment. Check it out!",
        "type": "promotion",
        "is_read": True,
        "created_at": "2024-02-08T14:20:00Z",
    },
    {
        "id": "notif-c5",
        "user_id": "client-1",
        "title": "Review Request",
        "message": "How was your experience with Mike Wilson? Please leave a review to help other clients",
        "type": "review",
        "is_read": False,
        "created_at": "2024-02-07T16:00:00Z",
    },
]

chat_messages = [
    {
        "id": "msg-1",
        "sender_id": "client-1",
        "receiver_id": "provider-1",
        "message": "Hi! I'd like to book an appointment for next week.",
        "is_read": True,
        "created_at": "2024-02-10T10:00:00Z",
    },
    {
        "id": "msg-2",
        "sender_id": "provider-1",
        "receiver_id": "client-1",
        "message": "Hello! I'd be happy to help you. What service are you interested in?",
        "is_read": True,
        "created_at": "2024-02-10T10:05:00Z",
    },
    {
        "id": "msg-3",
        "sender_id": "client-1",
        "receiver_id": "provider-1",
        "message": "I'm looking for a hair cut and styling session. Do you have any availability on Tuesday?",
        "is_read": True,
        "created_at": "2024-02-10T10:10:00Z",
    },
    {
        "id": "msg-4",
        "sender_id": "provider-1",
        "receiver_id": "client-1",
        "message": "Yes, I have slots available at 2:00 PM and 4:00 PM on Tuesday. Which would work better for you?",
        "is_read": False,
        "created_at": "2024-02-10T10:15:00Z",
    },
    {
        "id": "msg-5",
        "sender_id": "client-2",
        "receiver_id": "provider-1",
        "message": "Thank you for the great service yesterday! I'll definitely book again soon.",
        "is_read": False,
        "created_at": "2024-02-11T09:00:00Z",
    },
]

NAVIGATION = {
    "admin": [
        {"href": "/admin", "label": "Dashboard", "icon": "BarChart3"},
        {"href": "/admin/users", "label": "Manage Users", "icon": "Users"},
        {"href": "/admin/categories", "label": "Categories", "icon": "Tag"},
        {"href": "/admin/appointments", "label": "Appointments", "icon": "Calendar"},
        {"href": "/admin/services", "label": "Services", "icon": "Settings"},
        {"href": "/admin/revenue", "label": "Revenue", "icon": "BarChart3"},
        {"href": "/admin/invoices", "label": "Invoices", "icon": "FileText"},
        {"href": "/admin/refunds", "label": "Refunds", "icon": "DollarSign"},
    ],
    "provider": [
        {"href": "/provider", "label": "Dashboard", "icon": "BarChart3"},
        {"href": "/provider/services", "label": "My Services", "icon": "Settings"},
        {"href": "/provider/appointments", "label": "Appointments", "icon": "Calendar"},
        {"href": "/provider/revenue", "label": "Revenue", "icon": "BarChart3"},
        {"href": "/provider/invoices", "label": "Invoices", "icon": "FileText"},
        {"href": "/provider/promotions", "label": "Promotions", "icon": "Tag"},
        {"href": "/provider/clients", "label": "Clients", "icon": "Users"},
        {"href": "/provider/chat", "label": "Chat", "icon": "MessageCircle"},
        {"href": "/provider/notifications", "label": "Notifications", "icon": "Bell"},
    ],
    "client": [
        {"href": "/client", "label": "Dashboard", "icon": "BarChart3"},
        {"href": "/client/appointments", "label": "My Appointments", "icon": "Calendar"},
        {"href": "/client/search", "label": "Find Services", "icon": "Search"},
        {"href": "/client/favorites", "label": "Favorites", "icon": "Heart"},
        {"href": "/client/reviews", "label": "My Reviews", "icon": "Star"},
        {"href": "/client/chat", "label": "Chat", "icon": "MessageCircle"},
        {"href": "/client/notifications", "label": "Notifications", "icon": "Bell"},
        {"href": "/client/refunds", "label": "Refunds", "icon": "DollarSign"},
    ],
}

TIME_SLOTS = ["09:00", "10:00", "11:00", "12:00", "13:00", "14:00", "15:00", "16:00", "17:00", "18:00"]
