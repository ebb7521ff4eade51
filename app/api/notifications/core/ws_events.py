class WSEvents:
    """
    Contrato central de eventos WebSocket (evita strings soltas e typos).
    """

    PAYMENT_APPROVED = "paymentApproved"
    NEW_ORDER_FOR_ADMIN = "newOrderForAdmin"
    ORDER_PREPARING = "orderPreparing"
    ORDER_ON_DELIVERY = "orderOnDelivery"
    ORDER_DELIVERED = "orderDelivered"
    ORDER_CANCELLED = "orderCancelled"
