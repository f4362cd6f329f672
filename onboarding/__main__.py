from onboarding.main import main

main()
